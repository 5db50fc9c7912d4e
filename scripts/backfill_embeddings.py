#!/usr/bin/env python3
"""
Re-embed stored recipe memories after an embedding-model change.

Similarity is only meaningful between vectors from the same model, so
every row whose embedding_model differs from the configured one is
re-embedded with the same text the orchestrator uses.

Usage:
    python scripts/backfill_embeddings.py [--batch-size 50] [--user USER_ID]
    python scripts/backfill_embeddings.py --force          # re-embed everything
    python scripts/backfill_embeddings.py --dry-run
"""

import argparse
import asyncio

from recipe_diversity.config import settings
from recipe_diversity.db.client import get_client
from recipe_diversity.db.supabase_store import RECIPE_TABLE
from recipe_diversity.generation.orchestrator import build_embedding_text
from recipe_diversity.llm.client import OpenAIEmbedder
from recipe_diversity.models.entities import RecipeDraft

PAGE_SIZE = 1000


def fetch_rows(model: str, user_id: str | None, force: bool) -> list[dict]:
    """Rows needing a new embedding, oldest first."""
    supabase = get_client()
    rows: list[dict] = []
    start = 0

    while True:
        query = supabase.table(RECIPE_TABLE).select("id, user_id, recipe, embedding_model")
        if user_id:
            query = query.eq("user_id", user_id)
        if not force:
            query = query.neq("embedding_model", model)
        page = query.order("created_at").range(start, start + PAGE_SIZE - 1).execute().data or []
        rows.extend(page)
        if len(page) < PAGE_SIZE:
            return rows
        start += PAGE_SIZE


async def backfill(batch_size: int, user_id: str | None, force: bool, dry_run: bool) -> None:
    embedder = OpenAIEmbedder(model=settings.embedding_model)
    supabase = get_client()

    rows = fetch_rows(embedder.model, user_id, force)
    if not rows:
        print("  No recipe memories need new embeddings")
        return

    print(f"  Found {len(rows)} recipe memories to re-embed")
    if dry_run:
        for row in rows[:10]:
            print(f"    {row['id']}: {row['recipe'].get('name')} ({row.get('embedding_model')})")
        return

    total_updated = 0
    for i in range(0, len(rows), batch_size):
        batch = rows[i:i + batch_size]

        try:
            texts = [build_embedding_text(RecipeDraft.model_validate(row["recipe"])) for row in batch]
            embeddings = await asyncio.gather(*(embedder.embed(text) for text in texts))

            for row, embedding in zip(batch, embeddings):
                supabase.table(RECIPE_TABLE).update(
                    {"embedding": embedding, "embedding_model": embedder.model}
                ).eq("id", row["id"]).execute()
                total_updated += 1

            print(f"  Processed batch {i // batch_size + 1}: {len(batch)} recipes")

        except Exception as e:
            print(f"  ⚠️ Error processing batch {i // batch_size + 1}: {e}")

    print(f"  ✅ Updated {total_updated} recipe embeddings")


def main() -> None:
    parser = argparse.ArgumentParser(description="Re-embed recipe memories with the configured model")
    parser.add_argument("--batch-size", type=int, default=50, help="Recipes to embed per batch")
    parser.add_argument("--user", dest="user_id", help="Only backfill this user's recipes")
    parser.add_argument("--force", action="store_true", help="Re-embed even rows already on the current model")
    parser.add_argument("--dry-run", action="store_true", help="List what would change without writing")
    args = parser.parse_args()

    print("🚀 Recipe memory embedding backfill")
    print(f"   Model: {settings.embedding_model}")
    print(f"   Batch size: {args.batch_size}")
    print(f"   Force: {args.force}")
    print()

    asyncio.run(backfill(args.batch_size, args.user_id, args.force, args.dry_run))
    print("\n✨ Done!")


if __name__ == "__main__":
    main()
