# Generated migration for the Rewardman core models

import datetime
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("username", models.CharField(max_length=150, unique=True, verbose_name="username")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email")),
                (
                    "referral_code",
                    models.CharField(
                        help_text="Code other users enter at registration",
                        max_length=32,
                        unique=True,
                        verbose_name="referral code",
                    ),
                ),
                (
                    "credit_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=12,
                        verbose_name="credit balance",
                    ),
                ),
                ("points_balance", models.IntegerField(default=0, verbose_name="points balance")),
                ("vip_tier", models.CharField(default="bronze", max_length=20, verbose_name="VIP tier")),
                ("login_streak", models.IntegerField(default=0, verbose_name="login streak")),
                ("last_login_at", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("games_played", models.IntegerField(default=0, verbose_name="games played")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "referred_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="referrals",
                        to="rewardman.account",
                        verbose_name="referred by",
                    ),
                ),
            ],
            options={
                "verbose_name": "account",
                "verbose_name_plural": "accounts",
                "db_table": "rewardman_account",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(credit_balance__gte=0),
                        name="rewardman_account_credit_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(points_balance__gte=0),
                        name="rewardman_account_points_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AchievementDef",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.SlugField(unique=True, verbose_name="code")),
                ("name", models.CharField(max_length=100, verbose_name="name")),
                ("description", models.CharField(blank=True, max_length=200, verbose_name="description")),
                (
                    "achievement_type",
                    models.CharField(
                        choices=[
                            ("GAMES_PLAYED", "Games played"),
                            ("STREAK", "Login streak"),
                            ("POINTS", "Loyalty points"),
                        ],
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                ("threshold", models.PositiveIntegerField(verbose_name="threshold")),
                (
                    "reward_credits",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=12, verbose_name="reward credits"
                    ),
                ),
                ("reward_points", models.PositiveIntegerField(default=0, verbose_name="reward points")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
            ],
            options={
                "verbose_name": "achievement",
                "verbose_name_plural": "achievements",
                "db_table": "rewardman_achievement",
                "ordering": ["achievement_type", "threshold"],
            },
        ),
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.SlugField(unique=True, verbose_name="code")),
                ("name", models.CharField(max_length=100, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "kind",
                    models.CharField(
                        choices=[("game", "Game"), ("bonus", "Bonus")],
                        max_length=10,
                        verbose_name="kind",
                    ),
                ),
                (
                    "cooldown",
                    models.DurationField(
                        default=datetime.timedelta(days=1),
                        help_text="Minimum time between claims by the same account",
                        verbose_name="cooldown",
                    ),
                ),
                (
                    "reward_mode",
                    models.CharField(
                        choices=[("range", "Uniform range"), ("segments", "Segment table")],
                        default="range",
                        max_length=10,
                        verbose_name="reward mode",
                    ),
                ),
                (
                    "min_reward",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("5"), max_digits=12, verbose_name="minimum reward"
                    ),
                ),
                (
                    "max_reward",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("50"), max_digits=12, verbose_name="maximum reward"
                    ),
                ),
                (
                    "segments",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text='[{"value": 10, "label": "10", "weight": 25}, ...]',
                        verbose_name="segments",
                    ),
                ),
                (
                    "selection",
                    models.CharField(
                        choices=[
                            ("uniform", "Uniform over segments"),
                            ("weighted", "Proportional to weight"),
                        ],
                        default="uniform",
                        max_length=10,
                        verbose_name="segment selection",
                    ),
                ),
                (
                    "min_tier",
                    models.CharField(
                        blank=True,
                        help_text="Empty = open to every tier",
                        max_length=20,
                        verbose_name="minimum VIP tier",
                    ),
                ),
                (
                    "credit_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("10"), max_digits=12, verbose_name="credit amount"
                    ),
                ),
                (
                    "streak_required",
                    models.IntegerField(
                        default=0,
                        help_text="Login streak needed to claim (0 = none)",
                        verbose_name="streak required",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("display_order", models.IntegerField(default=0, verbose_name="display order")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "offer",
                "verbose_name_plural": "offers",
                "db_table": "rewardman_offer",
                "ordering": ["kind", "display_order", "created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(min_reward__lte=models.F("max_reward")),
                        name="rewardman_offer_min_lte_max",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AchievementUnlock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("progress", models.PositiveIntegerField(default=0, verbose_name="progress")),
                ("is_unlocked", models.BooleanField(default=False, verbose_name="unlocked")),
                ("unlocked_at", models.DateTimeField(blank=True, null=True, verbose_name="unlocked at")),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="achievement_unlocks",
                        to="rewardman.account",
                        verbose_name="account",
                    ),
                ),
                (
                    "achievement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="unlocks",
                        to="rewardman.achievementdef",
                        verbose_name="achievement",
                    ),
                ),
            ],
            options={
                "verbose_name": "achievement unlock",
                "verbose_name_plural": "achievement unlocks",
                "db_table": "rewardman_achievement_unlock",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("account", "achievement"),
                        name="rewardman_unique_achievement_per_account",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ClaimRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sequence", models.PositiveIntegerField(verbose_name="sequence")),
                ("claimed_at", models.DateTimeField(db_index=True, verbose_name="claimed at")),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claims",
                        to="rewardman.account",
                        verbose_name="account",
                    ),
                ),
                (
                    "offer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claims",
                        to="rewardman.offer",
                        verbose_name="offer",
                    ),
                ),
            ],
            options={
                "verbose_name": "claim record",
                "verbose_name_plural": "claim records",
                "db_table": "rewardman_claim_record",
                "ordering": ["-claimed_at", "-sequence"],
                "indexes": [
                    models.Index(
                        fields=["account", "offer", "-sequence"], name="rewardman_claim_seq_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("account", "offer", "sequence"),
                        name="rewardman_unique_claim_sequence",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("GAME_WIN", "Game win"),
                            ("BONUS_CLAIM", "Bonus claim"),
                            ("REFERRAL_BONUS", "Referral bonus"),
                            ("ACHIEVEMENT", "Achievement"),
                            ("ADMIN_CREDIT", "Admin credit"),
                        ],
                        db_index=True,
                        max_length=20,
                        verbose_name="category",
                    ),
                ),
                (
                    "credit_delta",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Signed credit change",
                        max_digits=12,
                        verbose_name="credit delta",
                    ),
                ),
                ("point_delta", models.IntegerField(help_text="Signed point change", verbose_name="point delta")),
                (
                    "credit_balance_after",
                    models.DecimalField(decimal_places=2, max_digits=12, verbose_name="credit balance after"),
                ),
                ("points_balance_after", models.IntegerField(verbose_name="points balance after")),
                ("description", models.CharField(max_length=200, verbose_name="description")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="Idempotency key (ex: claim:123)",
                        max_length=100,
                        verbose_name="reference",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="created by")),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="rewardman.account",
                        verbose_name="account",
                    ),
                ),
            ],
            options={
                "verbose_name": "ledger entry",
                "verbose_name_plural": "ledger entries",
                "db_table": "rewardman_ledger_entry",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["account", "-created_at"], name="rewardman_entry_acct_date_idx"),
                    models.Index(fields=["account", "category"], name="rewardman_entry_acct_cat_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("reference", ""), _negated=True),
                        fields=("account", "reference"),
                        name="rewardman_unique_entry_reference",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                ("message", models.TextField(verbose_name="message")),
                ("category", models.CharField(db_index=True, max_length=20, verbose_name="category")),
                ("is_read", models.BooleanField(default=False, verbose_name="read")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to="rewardman.account",
                        verbose_name="account",
                    ),
                ),
            ],
            options={
                "verbose_name": "notification",
                "verbose_name_plural": "notifications",
                "db_table": "rewardman_notification",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["account", "is_read"], name="rewardman_notif_unread_idx"),
                ],
            },
        ),
    ]
