"""Anonymize an exported ballot JSON file for use as a test fixture.

Replaces every voter name with a fake one generated by faker with a fixed
seed, and drops fields that could identify a voter's device or network.

Usage:
    python scripts/anonymize_ballots.py exports/ballots.json
    python scripts/anonymize_ballots.py exports/ballots.json -o output.json
"""

import argparse
import json
from pathlib import Path

from faker import Faker

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"
DEFAULT_OUTPUT = FIXTURES_DIR / "ballots.json"

SEED = 20260201

IDENTIFYING_FIELDS = ("clientId", "ipHash")


def discover_names(ballots: list[dict]) -> set[str]:
    """Collect every non-blank voter name."""
    names = set()
    for ballot in ballots:
        name = (ballot.get("voterName") or "").strip()
        if name:
            names.add(name)
    return names


def generate_fake_names(names: set[str], seed: int) -> dict[str, str]:
    """Map each real name to a distinct fake first name.

    Case variants of the same name map to the same fake. Real names are
    processed in sorted order so the mapping is stable for a given seed.
    """
    fake = Faker()
    Faker.seed(seed)

    mapping: dict[str, str] = {}
    by_lower: dict[str, str] = {}
    used_fakes: set[str] = set()
    lowered_real = {n.lower() for n in names}

    for name in sorted(names):
        lower_name = name.lower()
        if lower_name in by_lower:
            mapping[name] = by_lower[lower_name]
            continue

        fake_name = fake.first_name()
        while fake_name.lower() in lowered_real or fake_name in used_fakes:
            fake_name = fake.first_name()
        used_fakes.add(fake_name)

        by_lower[lower_name] = fake_name
        mapping[name] = fake_name

    return mapping


def anonymize(ballots: list[dict], mapping: dict[str, str]) -> list[dict]:
    result = []
    for ballot in ballots:
        ballot = {k: v for k, v in ballot.items() if k not in IDENTIFYING_FIELDS}
        name = (ballot.get("voterName") or "").strip()
        if name:
            ballot["voterName"] = mapping[name]
        result.append(ballot)
    return result


def main():
    parser = argparse.ArgumentParser(
        description="Anonymize an exported ballot JSON file")
    parser.add_argument("input", help="Path to the exported ballots")
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Output path (default: {DEFAULT_OUTPUT})")
    args = parser.parse_args()

    ballots = json.loads(Path(args.input).read_text(encoding="utf-8"))
    if isinstance(ballots, dict):
        ballots = ballots.get("ballots", [])

    names = discover_names(ballots)
    print(f"Found {len(names)} unique voter names")

    mapping = generate_fake_names(names, SEED)

    for original, fake in sorted(mapping.items()):
        print(f"  {original} -> {fake}")

    result = anonymize(ballots, mapping)

    # Verify no original names remain
    text = json.dumps(result, indent=2, ensure_ascii=False)
    remaining = [name for name in names if f'"{name}"' in text]
    if remaining:
        print(f"WARNING: {len(remaining)} names still found: {remaining}")
    else:
        print("All names successfully replaced.")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text + "\n", encoding="utf-8")
    print(f"Written to {output_path}")


if __name__ == "__main__":
    main()
