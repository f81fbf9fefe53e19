from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Batch",
            fields=[
                ("batch_id", models.CharField(max_length=128, primary_key=True, serialize=False)),
                ("content_ref", models.CharField(blank=True, max_length=256, null=True)),
                ("manufacturer", models.CharField(blank=True, max_length=64, null=True)),
                ("created_at", models.BigIntegerField(blank=True, null=True)),
            ],
            options={"db_table": "batches"},
        ),
        migrations.CreateModel(
            name="Handoff",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("batch_id", models.CharField(db_index=True, max_length=128)),
                ("from_addr", models.CharField(max_length=64)),
                ("to_addr", models.CharField(max_length=64)),
                ("time", models.BigIntegerField()),
            ],
            options={"db_table": "handoffs"},
        ),
        migrations.CreateModel(
            name="SensorReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("batch_id", models.CharField(db_index=True, max_length=128)),
                ("reading_hash", models.CharField(max_length=130, unique=True)),
                ("signer", models.CharField(blank=True, max_length=64, null=True)),
                ("time", models.BigIntegerField(blank=True, null=True)),
                ("raw_payload", models.TextField(blank=True, null=True)),
                ("temp_c", models.FloatField(blank=True, db_column="tempC", null=True)),
                ("payload_ts", models.BigIntegerField(blank=True, null=True)),
                ("nonce", models.CharField(blank=True, max_length=128, null=True)),
            ],
            options={"db_table": "sensors"},
        ),
        migrations.CreateModel(
            name="SyncState",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64, unique=True)),
                ("start_block", models.BigIntegerField(default=0)),
                ("backfilled_through", models.BigIntegerField(blank=True, null=True)),
                ("last_block", models.BigIntegerField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"db_table": "sync_state"},
        ),
        migrations.AddConstraint(
            model_name="handoff",
            constraint=models.UniqueConstraint(
                fields=("batch_id", "from_addr", "to_addr", "time"),
                name="uniq_handoff_event",
            ),
        ),
    ]
