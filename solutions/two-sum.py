import json
import sys

nums = json.loads(sys.stdin.readline())
target = int(sys.stdin.readline())
seen = {}
for i, n in enumerate(nums):
    if target - n in seen:
        print(f"[{seen[target - n]},{i}]")
        break
    seen[n] = i
