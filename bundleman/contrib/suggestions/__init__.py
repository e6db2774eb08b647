"""
Suggestions module - find combos a cart qualifies for.

Usage:
    from bundleman.contrib.suggestions import find_suitable_combos

    for suggestion in find_suitable_combos(items):
        print(suggestion.combo.code, suggestion.savings_q)
"""

from bundleman.contrib.suggestions.suggestions import ComboSuggestion, find_suitable_combos

__all__ = ["ComboSuggestion", "find_suitable_combos"]
