#!/usr/bin/env python3
"""Insert a handful of sample feedback rows."""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from database.database import SessionLocal, init_db
from models.feedback import Feedback

SAMPLE_FEEDBACK = [
    {"category": "facilities", "message": "Library computers aren't having internet", "priority": "high", "status": "new"},
    {"category": "teaching", "message": "Professor ABC's lectures are very engaging and helpful", "priority": "low", "status": "reviewed"},
    {"category": "safety", "message": "Broken lights near parking lot after 7 PM", "priority": "critical", "status": "new"},
    {"category": "administration", "message": "Exam result was good for me, thanks a lot!", "priority": "low", "status": "resolved"},
    {"category": "events", "message": "We need more technical workshops and hackathons", "priority": "medium", "status": "new"},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        for row in SAMPLE_FEEDBACK:
            db.add(Feedback(**row))
        db.commit()
        print(f"✅ Inserted {len(SAMPLE_FEEDBACK)} sample items")
    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
