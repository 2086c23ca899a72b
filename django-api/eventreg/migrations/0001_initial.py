import django.core.serializers.json
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StoredItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("partition_key", models.CharField(max_length=255)),
                ("sort_key", models.CharField(max_length=255)),
                (
                    "attributes",
                    models.JSONField(default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["partition_key", "sort_key"],
                "indexes": [models.Index(fields=["sort_key", "partition_key"], name="eventreg_item_sort_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("partition_key", "sort_key"), name="unique_item_key"),
                ],
            },
        ),
    ]
