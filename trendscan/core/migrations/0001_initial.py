"""
Initial schema: TrendRecord (`trends` table).
"""

from django.db import migrations, models
import uuid


class Migration(migrations.Migration):
    """Create the trends table."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TrendRecord",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("title", models.CharField(max_length=500)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("models", "Models"),
                            ("tools", "Tools"),
                            ("research", "Research"),
                            ("drama", "Drama"),
                            ("tutorials", "Tutorials"),
                        ],
                        max_length=20,
                    ),
                ),
                ("summary", models.TextField()),
                ("why_it_matters", models.TextField()),
                ("content_angle", models.TextField()),
                ("script", models.TextField()),
                ("sources", models.JSONField(blank=True, default=list)),
                ("engagement_score", models.IntegerField(default=0)),
                ("date", models.DateField(db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "trends",
                "ordering": ["-date", "-engagement_score"],
            },
        ),
        migrations.AddIndex(
            model_name="trendrecord",
            index=models.Index(
                fields=["date", "-engagement_score"],
                name="idx_trend_date_score",
            ),
        ),
    ]
