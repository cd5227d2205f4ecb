import logging

from django.conf import settings
from django.contrib.auth import login
from django.shortcuts import render, redirect
from django.views.decorators.cache import never_cache
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_POST

from .forms import SignInForm
from .session import safe_redirect_target, sign_out

logger = logging.getLogger(__name__)


@ensure_csrf_cookie
@never_cache
def signin_view(request):
    next_url = request.POST.get("next") or request.GET.get("next") or ""
    redirect_to = safe_redirect_target(request, next_url, settings.LOGIN_REDIRECT_URL)

    if request.user.is_authenticated:
        return redirect(redirect_to)

    if request.method == "POST":
        form = SignInForm(request, data=request.POST)
        if form.is_valid():
            user = form.get_user()
            login(request, user)
            logger.info("User signed in: user=%s", user.get_username())
            return redirect(redirect_to)
        logger.info("Failed sign-in attempt for identifier=%s", request.POST.get("identifier", ""))
    else:
        form = SignInForm(request)

    return render(request, "accounts/signin.html", {"form": form, "next": next_url})


@require_POST
def logout_view(request):
    return sign_out(request, request.POST.get("next"))
