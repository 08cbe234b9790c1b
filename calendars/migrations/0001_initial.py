from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BankHoliday",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Name of the holiday (e.g., Boxing Day)", max_length=200
                    ),
                ),
                (
                    "registered_on",
                    models.DateField(help_text="Date of the holiday", unique=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive")],
                        default="active",
                        help_text="Only active holidays affect billing",
                        max_length=10,
                    ),
                ),
            ],
            options={
                "ordering": ["registered_on"],
            },
        ),
    ]
