"""Global constants and default settings."""

WINDOW_WIDTH = 720
WINDOW_HEIGHT = 320
FPS = 60
WINDOW_TITLE = "pianodrill"

# Practice tempo; duration classes and the metronome derive from it
TEMPO_BPM = 80
BEAT_SECONDS = 60.0 / TEMPO_BPM

# Note pools (MIDI numbers). Middle C = 60.
RIGHT_HAND_NOTES = (60, 62, 64, 65, 67, 69, 71)
LEFT_HAND_NOTES = (48, 50, 52, 53, 55, 57, 59)
LEFT_HAND_CHORDS = (
    ("C3+E3+G3", (48, 52, 55)),
    ("B2+F3+G3", (47, 53, 55)),
)

# Hold-time tolerances (seconds) per duration class
QUARTER_TOLERANCE = 0.3
HALF_TOLERANCE = 0.4
WHOLE_TOLERANCE = 0.6

# Delay before the next target appears after a completed one (seconds)
SINGLE_SETTLE_DELAY = 0.3
PAIRED_SETTLE_DELAY = 0.4
CHORD_SETTLE_DELAY = 0.5

# Chord selection odds
LEFT_MIXED_CHORD_PROBABILITY = 0.5
SEPARATE_MIXED_CHORD_GATE = 0.3
SEPARATE_CHORD_SHARE = 0.5

# Focused practice
FOCUS_TRIGGER_MISTAKES = 2
FOCUS_COOLDOWN_SECONDS = 120.0
FOCUS_MAX_ROUNDS = 3
FOCUS_MASTERY_MISTAKES = 1
FOCUS_EXIT_DELAY = 2.0
REMEDIAL_MAX_ITEMS = 20

# Remote text generation (OpenAI-compatible chat completions)
REMOTE_BASE_URL = "https://api.groq.com/openai/v1"
REMOTE_MODEL = "llama-3.1-8b-instant"
REMOTE_TIMEOUT_SECONDS = 30.0
REMOTE_API_KEY_ENV = "GROQ_API_KEY"
