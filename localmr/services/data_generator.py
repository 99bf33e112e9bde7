"""
Sample input generator for the airport/flight job.

Writes a CSV mixing airport records and passenger flight records, in the
formats read by ``localmr.jobs.airports``, so the engine can be tried and
benchmarked on inputs of any size.
"""
import random
import string
from pathlib import Path
from typing import List, Optional

from localmr.utils.logger import get_logger

# Sample airports for realistic content
SAMPLE_AIRPORTS = [
    ("ATLANTA", "ATL", "33.636", "84.428"),
    ("BEIJING", "PEK", "40.080", "116.584"),
    ("LONDON", "LHR", "51.477", "0.461"),
    ("CHICAGO", "ORD", "41.978", "87.904"),
    ("TOKYO", "HND", "35.552", "139.779"),
    ("LOS ANGELES", "LAX", "33.942", "118.408"),
    ("PARIS", "CDG", "49.009", "2.547"),
    ("DALLAS", "DFW", "32.896", "97.037"),
    ("FRANKFURT", "FRA", "50.033", "8.570"),
    ("HONG KONG", "HKG", "22.308", "113.914"),
    ("DENVER", "DEN", "39.861", "104.673"),
    ("DUBAI", "DXB", "25.252", "55.364"),
    ("JAKARTA", "CGK", "6.125", "106.655"),
    ("AMSTERDAM", "AMS", "52.308", "4.763"),
    ("MADRID", "MAD", "40.471", "3.562"),
]


def generate_airport_lines(flights: int, passengers_per_flight: int = 10,
                           seed: Optional[int] = None) -> List[str]:
    """
    Generate airport records followed by shuffled passenger flight records.

    Args:
        flights (int): Number of distinct flights.
        passengers_per_flight (int): Upper bound of passenger records per flight.
        seed (Optional[int]): Random seed for reproducible files.

    Returns:
        List[str]: CSV lines without trailing newlines.
    """
    rng = random.Random(seed)
    lines = [",".join(airport) for airport in SAMPLE_AIRPORTS]
    codes = [airport[1] for airport in SAMPLE_AIRPORTS]

    flight_lines = []
    for _ in range(flights):
        flight_id = _random_id(rng, "UUUDDDDU")
        origin, destination = rng.sample(codes, 2)
        departure = rng.randint(1420000000, 1429999999)
        minutes = rng.randint(30, 1440)
        for _ in range(rng.randint(1, passengers_per_flight)):
            passenger = _random_id(rng, "UUUDDDDUUD")
            flight_lines.append(
                f"{passenger},{flight_id},{origin},{destination},{departure},{minutes}"
            )

    rng.shuffle(flight_lines)
    return lines + flight_lines


def create_input_file(output_path: str, flights: int, passengers_per_flight: int = 10,
                      seed: Optional[int] = None) -> str:
    """
    Create an airport/flight input file.

    Returns:
        str: Absolute path of the created file.
    """
    logger = get_logger(__name__)
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = generate_airport_lines(flights, passengers_per_flight, seed)
    with open(path, 'w', encoding='utf-8') as f:
        f.write("\n".join(lines) + "\n")

    logger.info(f"Wrote {len(lines):,} records ({path.stat().st_size:,} bytes) to {path}")
    return str(path.absolute())


def _random_id(rng: random.Random, pattern: str) -> str:
    # "U" = uppercase letter, "D" = digit
    return "".join(
        rng.choice(string.digits if kind == "D" else string.ascii_uppercase)
        for kind in pattern
    )
