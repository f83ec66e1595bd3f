# =============================================================================
# WordChef Client - CLI Entry Point
# =============================================================================
# Entry point for the wordchef command. Resolves the API key, builds the API
# client, and runs one of three actions:
#   - nearest:    nearest neighbors + bulk images for them (default)
#   - embeddings: per-word embeddings of the query
#   - image:      a single image for the query
# Errors are printed as "Error: <message>" and never raised to the shell.
# =============================================================================

import argparse
import logging
import sys

from config import get_config
from wordchef.api import WordChefClient
from wordchef.credentials import CredentialStore
from wordchef.errors import WordChefError
from wordchef.session import QuerySession

logger = logging.getLogger(__name__)


def _print_banner(config, mode: str, query: str) -> None:
    print("\n" + "=" * 60)
    print("  WordChef - Word Embedding Client")
    print("=" * 60)
    print(f"  Server : {config.base_url}")
    print(f"  Mode   : {mode}")
    print(f"  Query  : {query}")
    print("=" * 60 + "\n")


def _save_images(images, output_dir) -> None:
    if not output_dir:
        return
    for result in images:
        path = result.save(output_dir)
        print(f"  saved {path}")


def run_nearest(client: WordChefClient, config, query: str, limit_text: str) -> int:
    """Nearest neighbors + bulk images; returns the process exit status."""
    with QuerySession(client, default_limit=config.default_limit, max_limit=config.max_limit) as session:
        state = session.submit(query, limit_text).result()

    if state.error_message:
        print(f"Error: {state.error_message}")
        return 1

    for neighbor in state.neighbors:
        marker = "*" if neighbor.word in state.images else " "
        print(f" {marker} {neighbor.word:<24} {neighbor.distance:.4f}")

    images = state.sorted_images()
    print(f"\n{len(images)}/{len(state.neighbors)} images loaded")
    _save_images(images, config.output_dir)
    return 0


def run_embeddings(client: WordChefClient, query: str) -> int:
    """Print the dimension and leading values of each word's embedding."""
    result = client.fetch_embeddings(query)
    matrix = result.embedding_matrix()
    for word, row in zip(result.words, matrix):
        head = ", ".join(f"{v:.4f}" for v in row[:5])
        print(f"  {word:<24} dim={row.shape[0]} [{head}, ...]")
    if result.average_embedding is not None:
        print(f"  {'(average)':<24} dim={len(result.average_embedding)}")
    return 0


def run_image(client: WordChefClient, config, query: str) -> int:
    result = client.fetch_single_image(query)
    width, height = result.size
    print(f"  {result.word}: {width}x{height} {result.image.format or ''}")
    _save_images([result], config.output_dir)
    return 0


def main(argv=None) -> int:
    """CLI entry point for the WordChef client."""
    parser = argparse.ArgumentParser(
        description="WordChef - nearest words and images from the word-embedding service",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("query", type=str, help="Word(s) to look up")
    parser.add_argument(
        "--limit", type=str, default=None,
        help="Number of neighbors (1-20, non-numeric falls back to the default)",
    )
    parser.add_argument(
        "--mode", choices=("nearest", "embeddings", "image"), default="nearest",
        help="Which lookup to run",
    )
    parser.add_argument("--base-url", type=str, default=None, help="Service base URL (overrides config)")
    parser.add_argument(
        "--api-key", type=str, default=None,
        help="API key to use and persist to local settings",
    )
    parser.add_argument("--output-dir", type=str, default=None, help="Directory to save decoded images to")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = get_config()
    if args.base_url is not None:
        config.base_url = args.base_url.rstrip("/")
    if args.output_dir is not None:
        config.output_dir = args.output_dir

    credentials = CredentialStore.from_config(config)
    if args.api_key is not None:
        credentials.save(args.api_key)
    api_key = credentials.load() or ""
    logger.debug("Settings file: %s", config.settings_path)

    limit_text = args.limit if args.limit is not None else str(config.default_limit)

    _print_banner(config, args.mode, args.query)
    client = WordChefClient(
        base_url=config.base_url,
        api_key=api_key,
        timeout=config.request_timeout,
        max_limit=config.max_limit,
    )

    try:
        if args.mode == "embeddings":
            return run_embeddings(client, args.query)
        if args.mode == "image":
            return run_image(client, config, args.query)
        return run_nearest(client, config, args.query, limit_text)
    except WordChefError as exc:
        print(f"Error: {exc}")
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
