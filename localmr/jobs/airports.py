"""
Airport and flight statistics job.

Input is a mix of two CSV record types:

    airport:  NAME,CODE,LATITUDE,LONGITUDE
              e.g. ATLANTA,ATL,33.636,84.428
    flight:   PASSENGER_ID,FLIGHT_ID,FROM,TO,DEPARTURE_EPOCH,FLIGHT_MINUTES
              e.g. UES9151GS5,SQU6245R,DEN,FRA,1420564460,1049

The reducer produces, per airport, its description and the number of
distinct flights leaving it, and per flight, its details and the number of
distinct passengers. Lines matching neither shape are ignored.

Run with:
    localmr run -i data/airports.csv -o output/airports.txt \\
        --mapper localmr.jobs.airports:map_record \\
        --reducer localmr.jobs.airports:reduce_group
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone

AIRPORT_NAME = re.compile(r"[A-Z][A-Z ]{0,19}")
AIRPORT_CODE = re.compile(r"[A-Z]{3}")
COORDINATE = re.compile(r"[0-9]{1,3}\.[0-9]{3,13}")
PASSENGER_ID = re.compile(r"[A-Z]{3}[0-9]{4}[A-Z]{2}[0-9]")
FLIGHT_ID = re.compile(r"[A-Z]{3}[0-9]{4}[A-Z]")
EPOCH = re.compile(r"[0-9]{10}")
MINUTES = re.compile(r"[0-9]{1,4}")


@dataclass(frozen=True)
class AirportData:
    name: str
    latitude: str
    longitude: str

    def describe(self) -> str:
        return (
            f"AIRPORT NAME: {self.name} | AIRPORT LATITUDE: {self.latitude} "
            f"| AIRPORT LONGITUDE: {self.longitude}"
        )


@dataclass(frozen=True)
class Flight:
    flight_id: str
    passenger_id: str
    origin: str
    destination: str
    departure: int
    minutes: int

    def describe(self) -> str:
        departure = datetime.fromtimestamp(self.departure, tz=timezone.utc)
        arrival = datetime.fromtimestamp(self.departure + self.minutes * 60, tz=timezone.utc)
        return (
            f"FLIGHT ID: {self.flight_id} | FROM: {self.origin} | TO: {self.destination} "
            f"| DEPARTURE: {departure:%H:%M:%S} | ARRIVAL: {arrival:%H:%M:%S} "
            f"| FLIGHT TIME: {self.minutes} min"
        )


def map_record(record, emit):
    fields = [field.strip() for field in record.split(",")]

    if len(fields) == 4 and _matches(fields, AIRPORT_NAME, AIRPORT_CODE, COORDINATE, COORDINATE):
        name, code, latitude, longitude = fields
        emit(code, AirportData(name, latitude, longitude))
        return

    if len(fields) == 6 and _matches(fields, PASSENGER_ID, FLIGHT_ID, AIRPORT_CODE,
                                     AIRPORT_CODE, EPOCH, MINUTES):
        passenger, flight_id, origin, destination, departure, minutes = fields
        emit(flight_id, Flight(flight_id, passenger, origin, destination, int(departure), int(minutes)))
        # Airport code -> flight id, counted by the airport reducer
        emit(origin, flight_id)


def reduce_group(key, values, emit):
    if FLIGHT_ID.fullmatch(str(key)):
        flights = [value for value in values if isinstance(value, Flight)]
        passengers = []
        for flight in flights:
            if flight.passenger_id not in passengers:
                passengers.append(flight.passenger_id)
        if flights:
            emit(key, flights[0].describe())
        emit(key, f"Passengers: {len(passengers)}")

    elif AIRPORT_CODE.fullmatch(str(key)):
        airport = None
        flight_ids = set()
        for value in values:
            if isinstance(value, AirportData):
                airport = value
            else:
                flight_ids.add(value)
        description = airport.describe() if airport is not None else "AIRPORT UNKNOWN"
        emit(key, f"{description} | NO. OF FLIGHTS FROM AIRPORT: {len(flight_ids)}")


def _matches(fields, *patterns) -> bool:
    return all(pattern.fullmatch(field) for pattern, field in zip(patterns, fields))
