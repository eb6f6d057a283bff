"""Color palette (colorblind-safe defaults)."""

# RGB tuples
BG = (18, 18, 24)
HUD_TEXT = (220, 220, 220)
IDLE = (220, 220, 220)
HOLD = (66, 135, 245)
CORRECT = (80, 220, 100)
INCORRECT = (220, 60, 60)
NOTICE = (245, 166, 66)
