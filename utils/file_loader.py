"""
File Loader
Utilities for loading and saving layered document JSON files
"""

import json
from typing import Dict, Optional


def load_json_document(json_path: str) -> Optional[Dict]:
    """
    Load document data from JSON file

    Args:
        json_path: Path to the JSON file

    Returns:
        Dictionary containing document data, or None if failed
    """
    try:
        with open(json_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error loading JSON file: {e}")
        return None


def save_json_document(json_path: str, data: Dict) -> bool:
    """Write document data as indented JSON, returning True on success."""
    try:
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return True
    except OSError as e:
        print(f"Error saving JSON file: {e}")
        return False
