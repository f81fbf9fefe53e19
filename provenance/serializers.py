from rest_framework import serializers

BATCH_ID_PATTERN = r"^[A-Za-z0-9._:\-]{1,128}$"

# Verify (경로 파라미터)
class BatchIdSerializer(serializers.Serializer):
    batch_id = serializers.RegexField(BATCH_ID_PATTERN, max_length=128)

# StorePayload (요청)
class StorePayloadRequestSerializer(serializers.Serializer):
    batchId     = serializers.RegexField(BATCH_ID_PATTERN, max_length=128)
    readingHash = serializers.CharField(max_length=130)
    rawPayload  = serializers.JSONField(required=False, allow_null=True,
                                        help_text="raw sensor payload, JSON text or object (tempC, ts, nonce, ...)")

# StorePayload (응답)
class StorePayloadResponseSerializer(serializers.Serializer):
    ok     = serializers.BooleanField()
    errors = serializers.DictField(required=False)

# Verify (응답 아이템)
class BatchSerializer(serializers.Serializer):
    batch_id          = serializers.CharField()
    content_ref       = serializers.CharField(allow_null=True)
    manufacturer      = serializers.CharField(allow_null=True)
    manufacturer_name = serializers.CharField(allow_null=True)
    created_at        = serializers.IntegerField(allow_null=True)

class HandoffSerializer(serializers.Serializer):
    id        = serializers.IntegerField()
    batch_id  = serializers.CharField()
    from_addr = serializers.CharField()
    from_name = serializers.CharField(allow_null=True)
    to_addr   = serializers.CharField()
    to_name   = serializers.CharField(allow_null=True)
    time      = serializers.IntegerField()

class SensorSerializer(serializers.Serializer):
    id           = serializers.IntegerField()
    batch_id     = serializers.CharField()
    reading_hash = serializers.CharField()
    short_hash   = serializers.CharField()
    signer       = serializers.CharField(allow_null=True)
    signer_name  = serializers.CharField(allow_null=True)
    time         = serializers.IntegerField(allow_null=True)
    tempC        = serializers.FloatField(allow_null=True)
    payload_ts   = serializers.IntegerField(allow_null=True, help_text="payload ts in ms")
    nonce        = serializers.CharField(allow_null=True)
    raw_payload  = serializers.CharField(allow_null=True)
    complete     = serializers.BooleanField()

class RiskSerializer(serializers.Serializer):
    score   = serializers.IntegerField()
    reasons = serializers.ListField(child=serializers.CharField())
    label   = serializers.ChoiceField(choices=["Authentic", "Review", "Suspicious"])

# Verify (응답 컨테이너)
class VerifyResponseSerializer(serializers.Serializer):
    batch    = BatchSerializer(allow_null=True)
    handoffs = HandoffSerializer(many=True)
    sensors  = SensorSerializer(many=True)
    risk     = RiskSerializer()

# Status (응답)
class StatusResponseSerializer(serializers.Serializer):
    ready  = serializers.BooleanField()
    sync   = serializers.DictField(allow_null=True)
    ledger = serializers.DictField()
