from django.urls import include, path

urlpatterns = [
    path("", include("apps.catalog.urls")),
    path("users/", include("apps.users.urls")),
]
