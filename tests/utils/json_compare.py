from typing import Dict, Iterable


def pick_keys(data: Dict, keys: Iterable[str]) -> Dict:
    keys = set(keys)
    return {k: v for k, v in data.items() if k in keys}
