from fastapi import APIRouter

from response_utils import json_response
from routers.logs.helpers import utc_now_iso

router = APIRouter()

# answered before method dispatch, so any verb except the OPTIONS preflight
@router.api_route("/health", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"])
def health_check():
    return json_response({"status": "ok", "timestamp": utc_now_iso()})
