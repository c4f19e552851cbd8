from django.urls import path

from .views import UserDetailView, UserListView

urlpatterns = [
    path("", UserListView.as_view(), name="api-users-list"),
    path("<int:user_id>/", UserDetailView.as_view(), name="api-users-detail"),
]
