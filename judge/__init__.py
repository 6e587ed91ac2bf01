"""
Code Judge - Execution & Grading Engine

This package contains the core components for grading submitted code
and ranking event participants:
- models: Data structures for questions, submissions and configuration
- languages: Language runner registry
- sandbox: Isolated process execution with deadlines
- grader: Test case execution and outcome classification
- scoring: Outcome to score policy
- submissions: Submission lifecycle and background evaluation
- leaderboard: Event rankings derived from resolved submissions
"""

__version__ = "1.0.0"
