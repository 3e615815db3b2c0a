#!/usr/bin/env python3
"""Create all tables for the configured DATABASE_URL."""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from database.database import init_db, DATABASE_URL

if __name__ == "__main__":
    init_db()
    print(f"✅ Tables created on {DATABASE_URL.split('@')[-1]}")
