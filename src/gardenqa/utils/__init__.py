from gardenqa.utils.matcher import Match, categories, normalize, score, search, suggestions

__all__ = ["Match", "categories", "normalize", "score", "search", "suggestions"]
