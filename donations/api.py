import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .forms import FoodDonationPayloadForm

REQUIRED_FIELDS = ("description", "quantity", "location")

logger = logging.getLogger(__name__)


def _json_body(request):
    try:
        return json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None


def _first_error(form) -> str:
    for field, errors in form.errors.items():
        if errors:
            return f"{field}: {errors[0]}"
    return "Invalid donation"


@csrf_exempt
@require_POST
def save_food(request):
    """Store a food donation posted as ``{description, quantity, location}``."""
    body = _json_body(request)
    if not isinstance(body, dict):
        return JsonResponse({"message": "Invalid JSON body"}, status=400)

    missing = [k for k in REQUIRED_FIELDS if not str(body.get(k) or "").strip()]
    if missing:
        return JsonResponse({"message": f"Missing fields: {', '.join(missing)}"}, status=400)

    form = FoodDonationPayloadForm(data={k: body[k] for k in REQUIRED_FIELDS})
    if not form.is_valid():
        logger.info("Rejected food donation payload: %s", form.errors.as_json())
        return JsonResponse({"message": _first_error(form)}, status=400)

    donation = form.save()
    logger.info("Food donation saved: id=%s quantity=%s", donation.pk, donation.quantity)
    return JsonResponse({"message": "Food donation saved", "id": donation.pk}, status=201)
