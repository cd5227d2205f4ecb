import logging
import os

from django.contrib import messages
from django.contrib.auth.views import redirect_to_login
from django.http import FileResponse, Http404
from django.shortcuts import render, redirect
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET, require_http_methods

from accounts.session import get_session_state

from .client import SaveFoodClient
from .forms import DonationForm
from .state import (
    MOUNT_LOADING,
    MOUNT_READY,
    MOUNT_REDIRECT,
    TEXT_FIELDS,
    DonationFormState,
    mount,
)

# Form actions; only ACTION_SUBMIT calls the save endpoint
ACTION_SUBMIT = "submit"
ACTION_UPDATE = "update"
ACTION_REMOVE_IMAGE = "remove_image"

logger = logging.getLogger(__name__)


def get_save_food_client() -> SaveFoodClient:
    return SaveFoodClient()


def _apply_edits(request, state: DonationFormState, cleaned_data=None) -> None:
    for name in TEXT_FIELDS:
        if name not in request.POST:
            continue
        value = cleaned_data[name] if cleaned_data else request.POST.get(name, "")
        state.change(name, value)

    if "image" in request.FILES:
        state.select_image(request.FILES["image"])


@never_cache
@require_http_methods(["GET", "POST"])
def donate_food(request):
    session_state = get_session_state(request)
    outcome = mount(session_state)
    if outcome == MOUNT_LOADING:
        return render(request, "donations/loading.html")
    if outcome == MOUNT_REDIRECT:
        return redirect_to_login(request.get_full_path())

    state = DonationFormState.load(request.session)
    form = None

    if request.method == "POST":
        action = request.POST.get("action") or ACTION_SUBMIT

        if action == ACTION_REMOVE_IMAGE:
            _apply_edits(request, state)
            state.clear_image()
        elif action == ACTION_UPDATE:
            _apply_edits(request, state)
        else:
            form = DonationForm(request.POST)
            if form.is_valid():
                _apply_edits(request, state, form.cleaned_data)
                logger.info("Submitting food donation for user=%s", request.user.get_username())
                if state.submit(get_save_food_client()):
                    state.save(request.session)
                    messages.success(request, state.acknowledgement)
                    return redirect("donations:donate_food")
            else:
                _apply_edits(request, state)
        state.save(request.session)

    if form is None:
        form = DonationForm(initial=state.draft.to_payload())

    context = {
        "form": form,
        "state": state,
        "session": session_state.session,
    }
    return render(request, "donations/donate_food.html", context)


@never_cache
@require_GET
def image_preview(request, filename):
    """Serve the preview of the image held by this session's draft."""
    if mount(get_session_state(request)) != MOUNT_READY:
        raise Http404("No preview")

    state = DonationFormState.load(request.session)
    image = state.draft.image
    if image is None or os.path.basename(image.name) != filename:
        raise Http404("No preview")

    try:
        fh = state.previews.open(image)
    except FileNotFoundError:
        logger.warning("Preview file missing name=%s", image.name)
        raise Http404("No preview")
    return FileResponse(fh, content_type=image.content_type or "application/octet-stream")
