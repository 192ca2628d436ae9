import os
import json

SETTINGS_FILE = os.path.join(os.getcwd(), "trc_settings.json")
DEFAULT_SETTINGS = {
    "strict_version": False,
    "strict_section_sizes": True,
    "max_inflated_size": 256 * 1024 * 1024,
    "log_level": "INFO",
}


def load_settings(path=None):
    path = path or SETTINGS_FILE
    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                settings = json.load(f)
            # Ensure all default keys are present
            for key, value in DEFAULT_SETTINGS.items():
                settings.setdefault(key, value)
            return settings
        except (IOError, json.JSONDecodeError) as e:
            print("Error loading settings:", e)
    return DEFAULT_SETTINGS.copy()


def save_settings(settings, path=None):
    try:
        with open(path or SETTINGS_FILE, "w") as f:
            json.dump(settings, f, indent=4)
    except IOError as e:
        print("Error saving settings:", e)
