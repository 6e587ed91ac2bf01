"""
Configuration loader for deployment-defined engine parameters.

Handles loading and validating judge configuration files.
"""

import json
import sys
from pathlib import Path
from typing import Optional

from .models import JudgeConfig


def load_config(config_path: Optional[Path] = None) -> JudgeConfig:
    """
    Load engine configuration from a JSON file.

    Args:
        config_path: Path to the configuration file. If None, looks for
                    'judge_config.json' next to the executable/script.

    Returns:
        JudgeConfig object with validated configuration

    Raises:
        ValueError: If config is invalid
    """
    if config_path is None:
        if getattr(sys, 'frozen', False):
            exe_dir = Path(sys.executable).parent
        else:
            exe_dir = Path(__file__).parent.parent

        config_path = exe_dir / "judge_config.json"

    if not config_path.exists():
        print(f"Warning: Config file '{config_path}' not found. Using default configuration.")
        return JudgeConfig.default()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ValueError(f"Error reading config file: {e}")

    config = JudgeConfig.from_dict(data)

    is_valid, error_message = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error_message}")

    return config


def create_sample_config(output_path: Path):
    """
    Create a sample configuration file for deployments.

    Args:
        output_path: Path where to save the sample config
    """
    sample_config = {
        "max_concurrent_evaluations": 4,
        "default_time_limit_ms": 5000,
        "default_memory_limit_mb": 256,
        "compile_timeout_seconds": 30.0,
        "evaluation_grace_seconds": 10.0,
        "feedback_enabled": True,
        "feedback_timeout_seconds": 15.0,
        "feedback_api_url": "https://api.openai.com/v1/chat/completions",
        "feedback_model": "gpt-3.5-turbo",
        "log_path": "judge.log",
        "_comment": "This is a sample judge configuration. Adjust values as needed.",
        "_instructions": {
            "max_concurrent_evaluations": "Number of submissions evaluated at the same time",
            "default_time_limit_ms": "Per test case time limit when a question defines none",
            "default_memory_limit_mb": "Memory limit when a question defines none (Unix only)",
            "compile_timeout_seconds": "Time allowed for compiling C++/Java submissions",
            "evaluation_grace_seconds": "Extra time before a stuck evaluation is failed",
            "feedback_enabled": "Request AI hints for failed submissions (needs OPENAI_API_KEY)",
            "feedback_timeout_seconds": "HTTP timeout for the feedback service",
            "feedback_api_url": "Chat completions endpoint",
            "feedback_model": "Model used for feedback",
            "log_path": "File receiving the judge event log"
        }
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(sample_config, f, indent=2)

    print(f"Sample configuration created at: {output_path}")
