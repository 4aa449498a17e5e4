"""
URL configuration for the streak card project.
"""
from django.urls import include, path

urlpatterns = [
    path('', include('streakcard.urls')),
]
