from django.apps import AppConfig


class StreakCardConfig(AppConfig):
    name = 'streakcard'
    verbose_name = 'Streak Card'
