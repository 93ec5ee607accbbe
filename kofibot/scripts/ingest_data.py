#!/usr/bin/env python3
"""
Knowledge ingestion script for the Kofi SMS assistant.

Reads the business reference text, embeds every sentence and upserts the
vectors into the configured index namespace, creating a missing Pinecone
index first. Safe to re-run: chunk ids are positional, so an unchanged file
overwrites the same vectors.

Usage:
  python -m kofibot.scripts.ingest_data [--file PATH]
"""

import argparse
import asyncio
import sys

from ..app.config import Config
from ..app.embed import EmbeddingClient
from ..app.errors import IngestionError
from ..app.ingest import KnowledgeIngestor
from ..app.vector_store import create_vector_index


async def run(path: str) -> int:
    ingestor = KnowledgeIngestor(EmbeddingClient(), create_vector_index(), namespace=Config.PINECONE_NAMESPACE)
    try:
        report = await ingestor.ingest_file(path)
    except IngestionError as e:
        print(f"Ingestion failed at chunk {e.chunk_id}: {e.cause}")
        return 1

    print(f"Uploaded {report.chunk_count} vectors to namespace '{report.namespace}'")
    return 0


def main():
    """Main function to run the ingestion pipeline."""
    parser = argparse.ArgumentParser(description='Ingest business info into the vector index')
    parser.add_argument('--file', '-f', default=Config.KNOWLEDGE_FILE,
                        help='Reference text file to ingest')

    args = parser.parse_args()
    Config.debug_print()
    sys.exit(asyncio.run(run(args.file)))

if __name__ == '__main__':
    main()
