"""
URL configuration for streak card app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('api/streak', views.streak_badge_view, name='streak'),
    path('badge/<str:username>.svg', views.badge_view, name='badge'),
]
