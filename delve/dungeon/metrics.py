from typing import Dict


def init_metrics() -> Dict[str, int | float | bool]:
    return {
        'attempts': 0,
        'wall_budget': 0,
        'walls_placed': 0,
        'walls_skipped': 0,
        'monsters_placed': 0,
        'monsters_skipped': 0,
        'potions_placed': 0,
        'potions_skipped': 0,
        'void_rolled': False,
        'void_placed': False,
        'fallback_used': False,
        'runtime_ms': 0.0,
    }
