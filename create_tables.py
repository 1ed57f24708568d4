#!/usr/bin/env python3
import sys
import os
import logging

# Add the current directory to Python path
sys.path.insert(0, os.path.dirname(__file__))

from database.connection import create_tables, engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def create_all_tables():
    """Create all database tables"""
    try:
        logger.info(f"Creating database tables on {engine.url}...")
        create_tables()
        logger.info("All tables created successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        return False

if __name__ == "__main__":
    success = create_all_tables()
    sys.exit(0 if success else 1)
