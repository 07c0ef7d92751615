"""Create one payment, then fetch it repeatedly to exercise the read cache."""

import argparse
import asyncio
import statistics
import time
from uuid import uuid4

import httpx


def pct(values: list[float], p: float) -> float:
    """Simple percentile helper for latency values."""

    if not values:
        return 0.0
    idx = min(len(values) - 1, max(0, int((p / 100.0) * len(values)) - 1))
    return sorted(values)[idx]


def summarize(results: list[tuple[int, float]]) -> list[str]:
    """Status counts and latency figures as printable lines."""

    statuses: dict[int, int] = {}
    for code, _ in results:
        statuses[code] = statuses.get(code, 0) + 1
    lats = [latency for _, latency in results]
    return [
        f"status_counts={statuses}",
        f"p50_ms={pct(lats, 50):.2f}",
        f"p95_ms={pct(lats, 95):.2f}",
        f"p99_ms={pct(lats, 99):.2f}",
        f"avg_ms={statistics.mean(lats) if lats else 0.0:.2f}",
    ]


async def fetch_one(client: httpx.AsyncClient, base_url: str, payment_id: str) -> tuple[int, float]:
    """Fetch one payment and return (status_code, latency_ms)."""

    started = time.perf_counter()
    try:
        resp = await client.get(f"{base_url}/payments/{payment_id}", headers={"x-correlation-id": str(uuid4())})
        return resp.status_code, (time.perf_counter() - started) * 1000
    except httpx.HTTPError:
        return 599, (time.perf_counter() - started) * 1000


async def main() -> None:
    """CLI entrypoint for cache burst smoke tests."""

    parser = argparse.ArgumentParser(description="Fetch the same payment many times.")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--payment-id", default=None, help="existing id; a new payment is created when omitted")
    parser.add_argument("--currency", default="USD")
    parser.add_argument("--amount", type=float, default=1000)
    parser.add_argument("--count", type=int, default=200)
    parser.add_argument("--concurrency", type=int, default=20)
    args = parser.parse_args()

    sem = asyncio.Semaphore(args.concurrency)
    async with httpx.AsyncClient(timeout=10.0) as client:
        payment_id = args.payment_id
        if payment_id is None:
            resp = await client.post(
                f"{args.base_url}/payments",
                json={"amount": args.amount, "currency": args.currency},
            )
            resp.raise_for_status()
            payment_id = resp.json()["id"]
            print(f"created payment_id={payment_id}")

        async def worker() -> tuple[int, float]:
            async with sem:
                return await fetch_one(client, args.base_url, payment_id)

        results = await asyncio.gather(*(worker() for _ in range(args.count)))

    for line in summarize(results):
        print(line)


if __name__ == "__main__":
    asyncio.run(main())
