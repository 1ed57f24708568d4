#!/usr/bin/env python3
"""
Seed script to create sample shops around Bangalore for trying out discovery
"""
import os
import sys
import logging
sys.path.insert(0, os.path.dirname(__file__))

from database.connection import SessionLocal, create_tables
from models.product import Product
from schemas.shop import ShopCreate, GeoPoint, ShopContact
from services.shop import create_shop
from services.review import ReviewService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_SHOPS = [
    {
        "owner_id": "owner-asha",
        "name": "Asha Book House",
        "description": "Secondhand and new books, Kannada and English",
        "category_id": "books",
        "coordinates": [77.5946, 12.9716],
        "address": "MG Road, Bengaluru",
        "phone": "918041234567",
        "ratings": [5, 4, 5],
        "products": ["Kannada Classics Box Set", "Notebook Pack"]
    },
    {
        "owner_id": "owner-ravi",
        "name": "Ravi Electronics",
        "description": "Phone accessories and repairs",
        "category_id": "electronics",
        "coordinates": [77.6101, 12.9352],
        "address": "Koramangala 5th Block, Bengaluru",
        "phone": "918047654321",
        "ratings": [3, 4],
        "products": ["USB-C Cable", "Screen Guard"]
    },
    {
        "owner_id": "owner-meera",
        "name": "Meera's Bakery",
        "description": "Fresh bread and cakes every morning",
        "category_id": "food",
        "coordinates": [77.6408, 12.9784],
        "address": "Indiranagar 100ft Road, Bengaluru",
        "phone": "918049876543",
        "ratings": [5, 5, 4, 4],
        "products": ["Sourdough Loaf", "Plum Cake"]
    },
    {
        "owner_id": "owner-kiran",
        "name": "Kiran Hardware",
        "description": "Tools, paint and plumbing supplies",
        "category_id": "hardware",
        "coordinates": [77.5806, 13.0285],
        "address": "Hebbal, Bengaluru",
        "phone": "918045556666",
        "ratings": [],
        "products": ["Claw Hammer"]
    }
]

def create_sample_shops():
    """Create sample shops, products and reviews"""
    create_tables()
    db = SessionLocal()
    
    try:
        for sample in SAMPLE_SHOPS:
            shop = create_shop(
                db=db,
                shop_data=ShopCreate(
                    name=sample["name"],
                    description=sample["description"],
                    category_id=sample["category_id"],
                    location=GeoPoint(coordinates=sample["coordinates"]),
                    address=sample["address"],
                    contact=ShopContact(phone=sample["phone"])
                ),
                owner_id=sample["owner_id"]
            )
            
            for name in sample["products"]:
                db.add(Product(shop_id=shop.id, name=name, is_active=True))
            db.commit()
            
            for index, rating in enumerate(sample["ratings"]):
                ReviewService.create_review(
                    db=db,
                    shop_id=shop.id,
                    author_id=f"customer-{index + 1}",
                    rating=rating,
                    comment="Seeded review"
                )
            
            db.refresh(shop)
            logger.info(
                f"Seeded {shop.name}: {len(sample['products'])} products, "
                f"average {shop.average_rating:.2f} over {shop.rating_count} reviews"
            )
        
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating sample shops: {e}")
        return False
    finally:
        db.close()

if __name__ == "__main__":
    sys.exit(0 if create_sample_shops() else 1)
