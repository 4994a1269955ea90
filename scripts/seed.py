"""Database seeder: recreate the schema and fill it with demo users and articles.

Usage::

    python -m scripts.seed            # 20 users, 500 articles
    python -m scripts.seed --small    # 3 users, 10 articles

Every seeded user can sign in with the password ``password123``.
"""
import asyncio
import argparse
import random
import time

from blog_api.database import engine, async_session, Base
from blog_api.models import User, Article
from blog_api.security import hash_password

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "testing",
          "performance", "security", "rest-api", "sqlalchemy"]

DEMO_PASSWORD = "password123"


async def seed(small: bool = False):
    num_users = 3 if small else 20
    num_articles = 10 if small else 500

    print(f"Seeding: {num_users} users, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # One hash shared by every demo account; bcrypt is deliberately slow.
    password_hash = hash_password(DEMO_PASSWORD)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = User(
                name=f"User {i}",
                email=f"user_{i:04d}@example.com",
                password_hash=password_hash,
                token_version=0,
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        for i in range(num_articles):
            topic = random.choice(TOPICS)
            session.add(Article(
                title=f"Article {i}: notes on {topic}",
                body=f"Some thoughts about {topic}. " * 20,
                user_id=random.choice(users).id,
            ))
        await session.flush()
        print(f"  Created {num_articles} articles")

        await session.commit()

    await engine.dispose()
    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s (password: {DEMO_PASSWORD})")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a tiny dataset (10 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
