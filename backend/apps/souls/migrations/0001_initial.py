import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Soul",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("residence", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("won_on", models.DateField(db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="souls",
                        to="organizations.branch",
                    ),
                ),
                (
                    "evangelist",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="souls",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="souls",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["-won_on", "-created_at"],
                "indexes": [
                    models.Index(fields=["organization", "won_on"], name="soul_org_won_on_idx"),
                    models.Index(fields=["evangelist", "won_on"], name="soul_evangelist_won_on_idx"),
                ],
            },
        ),
    ]
