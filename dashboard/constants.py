DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

TASK_TYPES = ["recurring", "one_off"]
TASK_TYPE_LABELS = {"recurring": "Recurring", "one_off": "One-off"}
TASK_CATEGORIES = ["Uncategorized", "Training", "Creative", "Health", "General"]
TASK_PRIORITY_LEVELS = ["none", "low", "medium", "high"]
PRIORITY_META = {
    "none": {"label": "None", "color": "#9CA3AF"},
    "low": {"label": "Low", "color": "#60A5FA"},
    "medium": {"label": "Medium", "color": "#F59E0B"},
    "high": {"label": "High", "color": "#EF4444"},
}
DIFFICULTY_LABELS = {1: "Trivial", 2: "Easy", 3: "Medium", 4: "Hard", 5: "Brutal"}

# Completion count -> intensity bucket boundaries.
COLOR_THRESHOLDS = {
    "none": 0,
    "light": 3,
    "medium": 7,
    "dark": 10,
}
INTENSITY_COLORS = {
    "none": "#e5e7eb",
    "light": "#dcfce7",
    "medium": "#34d399",
    "dark": "#059669",
}
INTENSITY_LABELS = {
    "none": "No activity",
    "light": "Light activity",
    "medium": "Medium activity",
    "dark": "High activity",
}

DAY_TYPE_COLORS = {
    "active": "#059669",
    "neutral": "#a7f3d0",
    "inactive": "#e5e7eb",
}

DEFAULT_MOMENTUM_THRESHOLD = 5
MOMENTUM_WINDOW_DAYS = 7
TREND_WEEKS = 12
UPCOMING_DAYS = 7

COMMON_TIMEZONES = [
    "UTC",
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Sao_Paulo",
    "Europe/London",
    "Europe/Berlin",
    "Asia/Kolkata",
    "Asia/Tokyo",
    "Australia/Sydney",
]
