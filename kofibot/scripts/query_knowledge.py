#!/usr/bin/env python3
"""
Query the knowledge index from the command line.

Usage:
  python -m kofibot.scripts.query_knowledge "What are your opening hours?" [--top-k 3]
"""

import argparse
import asyncio

from ..app.config import Config
from ..app.embed import EmbeddingClient
from ..app.retrieval import Retriever
from ..app.vector_store import create_vector_index


async def run(query: str, top_k: int):
    retriever = Retriever(EmbeddingClient(), create_vector_index(), namespace=Config.PINECONE_NAMESPACE)
    results = await retriever.retrieve(query, top_k)

    print(f"Query: {query}")
    if not results:
        print("No results (index empty or unavailable)")
    for i, passage in enumerate(results, 1):
        print(f"{i}. Score: {passage.score:.4f}")
        print(f"   Text: {passage.text}")


def main():
    parser = argparse.ArgumentParser(description='Retrieve passages from the knowledge index')
    parser.add_argument('query', help='Free-text question')
    parser.add_argument('--top-k', '-k', type=int, default=Config.RETRIEVAL_TOP_K)
    args = parser.parse_args()
    asyncio.run(run(args.query, args.top_k))

if __name__ == '__main__':
    main()
