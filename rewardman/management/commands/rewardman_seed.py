"""Management command to create the default offer and achievement catalog."""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from rewardman.models import AchievementDef, AchievementType, Offer, OfferKind

GAMES = [
    {
        "code": "wheel-game",
        "name": "Lucky Wheel",
        "description": "Spin the wheel to win credits!",
        "min_reward": Decimal("5"),
        "max_reward": Decimal("100"),
        "display_order": 1,
    },
    {
        "code": "cookie-game",
        "name": "Fortune Cookie",
        "description": "Crack the cookie to reveal your fortune!",
        "min_reward": Decimal("10"),
        "max_reward": Decimal("75"),
        "display_order": 2,
    },
    {
        "code": "scratch-game",
        "name": "Scratch Card",
        "description": "Scratch to reveal hidden prizes!",
        "min_reward": Decimal("5"),
        "max_reward": Decimal("150"),
        "display_order": 3,
    },
]

BONUSES = [
    {
        "code": "daily-login",
        "name": "Daily Login Bonus",
        "description": "Claim your daily bonus credits!",
        "credit_amount": Decimal("25"),
        "cooldown": timedelta(hours=24),
        "display_order": 1,
    },
    {
        "code": "weekly-mega",
        "name": "Weekly Mega Bonus",
        "description": "Big weekly reward for loyal players!",
        "credit_amount": Decimal("100"),
        "cooldown": timedelta(days=7),
        "display_order": 2,
    },
    {
        "code": "streak-bonus",
        "name": "Streak Master",
        "description": "Bonus for 7-day login streak",
        "credit_amount": Decimal("75"),
        "cooldown": timedelta(days=7),
        "streak_required": 7,
        "display_order": 3,
    },
]

ACHIEVEMENTS = [
    ("first-game", "First Spin", "Play your first bonus game", AchievementType.GAMES_PLAYED, 1, "10", 5),
    ("game-enthusiast", "Game Enthusiast", "Play 10 bonus games", AchievementType.GAMES_PLAYED, 10, "50", 25),
    ("game-master", "Game Master", "Play 50 bonus games", AchievementType.GAMES_PLAYED, 50, "200", 100),
    ("streak-starter", "Streak Starter", "Maintain a 3-day login streak", AchievementType.STREAK, 3, "25", 15),
    ("streak-champion", "Streak Champion", "Maintain a 7-day login streak", AchievementType.STREAK, 7, "75", 50),
    ("silver-member", "Silver Status", "Reach Silver VIP tier", AchievementType.POINTS, 500, "100", 0),
    ("gold-member", "Gold Status", "Reach Gold VIP tier", AchievementType.POINTS, 2000, "250", 0),
]


class Command(BaseCommand):
    help = "Create the default games, bonuses and achievements (existing rows are kept)"

    def handle(self, *args, **options):
        created = 0
        with transaction.atomic():
            for game in GAMES:
                fields = dict(game)
                _, is_new = Offer.objects.get_or_create(
                    code=fields.pop("code"),
                    defaults={"kind": OfferKind.GAME, "cooldown": timedelta(hours=24), **fields},
                )
                created += is_new

            for bonus in BONUSES:
                fields = dict(bonus)
                _, is_new = Offer.objects.get_or_create(
                    code=fields.pop("code"),
                    defaults={"kind": OfferKind.BONUS, **fields},
                )
                created += is_new

            for code, name, description, kind, threshold, credits, points in ACHIEVEMENTS:
                _, is_new = AchievementDef.objects.get_or_create(
                    code=code,
                    defaults={
                        "name": name,
                        "description": description,
                        "achievement_type": kind,
                        "threshold": threshold,
                        "reward_credits": Decimal(credits),
                        "reward_points": points,
                    },
                )
                created += is_new

        self.stdout.write(self.style.SUCCESS(f"Seeded {created} catalog rows."))
