from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter

from django.db import DatabaseError
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from .models import SyncState
from . import ledger_runtime
from .ingestion import DEFAULT_INDEXER
from .services import InvalidRequest, QueryService
from .serializers import (
    BatchIdSerializer,
    StatusResponseSerializer,
    StorePayloadRequestSerializer,
    StorePayloadResponseSerializer,
    VerifyResponseSerializer,
)

import logging

access_log = logging.getLogger("django.request")


def get_query_service() -> QueryService:
    return QueryService()


class VerifyView(APIView):
    authentication_classes = []

    @extend_schema(
        parameters=[
            OpenApiParameter(name="batch_id", type=str, location=OpenApiParameter.PATH,
                             description="ledger batch id (decimal or 0x-hex)"),
        ],
        tags=["verify"],
        summary="Provenance timeline + risk for one batch",
        responses={200: VerifyResponseSerializer, 400: StorePayloadResponseSerializer},
        request=None,
    )
    def get(self, request, batch_id):
        ser = BatchIdSerializer(data={"batch_id": batch_id})
        if not ser.is_valid():
            return Response({"ok": False, "errors": ser.errors}, status=status.HTTP_400_BAD_REQUEST)

        try:
            body = get_query_service().verify(ser.validated_data["batch_id"])
        except DatabaseError:
            access_log.exception("[verify] batch lookup failed batch_id=%s", batch_id)
            return Response({"ok": False}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        access_log.info(
            "[verify] batch_id=%s found=%s handoffs=%d sensors=%d risk=%s",
            batch_id, body["batch"] is not None, len(body["handoffs"]), len(body["sensors"]),
            body["risk"]["label"],
        )
        resp = Response(body, status=status.HTTP_200_OK)
        resp['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
        return resp


@method_decorator(csrf_exempt, name='dispatch')
class StorePayloadView(APIView):
    authentication_classes = []

    @extend_schema(
        tags=["collect"],
        summary="Off-chain raw sensor payload for an anchored (or soon anchored) reading",
        request=StorePayloadRequestSerializer,
        responses={200: StorePayloadResponseSerializer, 400: StorePayloadResponseSerializer,
                   500: StorePayloadResponseSerializer},
    )
    def post(self, request):
        ser = StorePayloadRequestSerializer(data=request.data)
        if not ser.is_valid():
            return Response({"ok": False, "errors": ser.errors}, status=status.HTTP_400_BAD_REQUEST)
        p = ser.validated_data

        try:
            result = get_query_service().store_payload(p["batchId"], p["readingHash"], p.get("rawPayload"))
        except InvalidRequest as e:
            return Response({"ok": False, "errors": e.errors}, status=status.HTTP_400_BAD_REQUEST)
        except DatabaseError:
            access_log.exception("[payload] store failed batch_id=%s reading_hash=%s",
                                 p["batchId"], p["readingHash"])
            return Response({"ok": False}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        access_log.info("[payload] stored batch_id=%s reading_hash=%s", p["batchId"], p["readingHash"])
        return Response(result, status=status.HTTP_200_OK)


class StatusView(APIView):
    authentication_classes = []

    @extend_schema(
        tags=["ops"],
        summary="Indexer readiness (backfill finished) and ledger config",
        responses={200: StatusResponseSerializer, 503: StatusResponseSerializer},
        request=None,
    )
    def get(self, request):
        name = request.GET.get("indexer") or DEFAULT_INDEXER
        try:
            st = SyncState.objects.filter(name=name).first()
        except DatabaseError:
            access_log.exception("[status] sync state unavailable")
            st = None
        sync = None
        if st is not None:
            sync = {
                "name": st.name,
                "start_block": st.start_block,
                "backfilled_through": st.backfilled_through,
                "last_block": st.last_block,
                "updated_at": st.updated_at.isoformat() if st.updated_at else None,
            }
        ready = bool(st and st.ready)
        body = {"ready": ready, "sync": sync, "ledger": ledger_runtime.get_status()}
        return Response(body, status=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE)
