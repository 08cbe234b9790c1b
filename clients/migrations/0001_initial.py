from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(help_text="Full name of the client", max_length=200)),
                (
                    "authority_type",
                    models.CharField(
                        choices=[
                            ("private", "Private"),
                            ("local_authority", "Local Authority"),
                            ("nhs", "NHS"),
                        ],
                        default="private",
                        help_text="Who pays for this client's care",
                        max_length=30,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
