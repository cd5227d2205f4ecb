from django.urls import path

from . import api, views

app_name = "donations"
urlpatterns = [
    path("donate-food/", views.donate_food, name="donate_food"),
    path("donate-food/preview/<str:filename>", views.image_preview, name="image_preview"),

    # save endpoint the page posts to
    path("api/save-food", api.save_food, name="save_food"),
]
