"""
Trendscan domain enums.

All enums are defined as Django TextChoices for database storage as lowercase strings.
TextChoices inherit from both str and Enum, so pydantic models can use them directly.
"""

from django.db import models


class TrendCategory(models.TextChoices):
    """Closed set of categories an analysed trend may belong to."""
    MODELS = "models", "Models"
    TOOLS = "tools", "Tools"
    RESEARCH = "research", "Research"
    DRAMA = "drama", "Drama"
    TUTORIALS = "tutorials", "Tutorials"


class ContentStyle(models.TextChoices):
    """Output format the generated scripts are written for."""
    TIKTOK = "tiktok", "TikTok"
    YOUTUBE = "youtube", "YouTube"
    LINKEDIN = "linkedin", "LinkedIn"
    TWITTER = "twitter", "Twitter/X"
    NEWSLETTER = "newsletter", "Newsletter"
