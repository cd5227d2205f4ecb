from django.shortcuts import render, redirect


def home_view(request):
    return redirect("donations:donate_food")


def error_404_view(request, exception):
    return render(request, '404.html', status=404)


def csrf_failure(request, reason="", template_name="csrf_failure.html"):
    """Custom CSRF failure handler to show a helpful message.

    Note: sign-in and the donation draft live in the session and require cookies.
    """
    context = {
        "reason": reason,
    }
    return render(request, template_name, context, status=403)
