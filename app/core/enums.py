from enum import StrEnum


class BadgeKind(StrEnum):
    ADMIN = "Admin"
    MODERATOR = "Moderator"
    HELPER = "Helper"
    GOLDEN_KALA = "Golden Kala"
    FANCY_KALA = "Fancy Kala"
    KALA = "Kala"
    VIP = "VIP"
    FORMER_SUPPORTER = "Former Supporter"
    MEMBER = "Member"
    PLAYER = "Player"
