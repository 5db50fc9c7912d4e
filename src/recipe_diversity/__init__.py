"""
Recipe Diversity Engine.

Generates AI recipes that stay clear of a user's recent history:
- Similarity: embedding cosine checks against recent recipes
- Diversity: cuisine, protein, cooking method and ingredient variety
- Generation: adaptive-temperature retry loop
- Analytics: rolling-window diversity trends and insights
"""

__version__ = "1.0.0"
