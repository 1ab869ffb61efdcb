#!/usr/bin/env python3
"""
Basic usage example for the CityTZ module.
"""
import json

from CityTZ import CityData, CityService, SearchOptions
from CityTZ.exceptions import SearchError

def print_json(records):
    """Print records as formatted JSON."""
    print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))

def main():
    """Main function."""
    # Create a CityData instance over the bundled dataset
    city_data = CityData()

    # Exact lookups are case-insensitive and cached
    print("Looking up 'chicago'...")
    print_json(city_data.lookup_exact('chicago'))

    # Every term must match city, state, province or country
    print("\nSearching for 'springfield mo'...")
    print_json(city_data.find_partial('springfield mo'))

    print("\nCities in Germany (DEU)...")
    for record in city_data.find_by_country_code('DEU'):
        print(f"{record.city}: {record.timezone}")

    print("\nExact matches for 'London'...")
    for record in city_data.search('London', SearchOptions(exact_match=True)):
        print(f"{record.city}, {record.country}: {record.timezone}")

    # Invalid input is reported as a SearchError
    try:
        city_data.lookup_exact('../etc/passwd')
    except SearchError as e:
        print(f"\nRejected: {e.user_message}")

    # The service layer adds rate limiting, filters and result limits
    service = CityService(city_data=city_data)
    cities = service.all_cities(timezone='America/', limit=5)
    print(f"\nFirst {len(cities)} cities in American timezones:")
    for record in cities:
        print(f"  {record.city} ({record.timezone})")

    print(f"\nCache entries: {city_data.cache_size()}")

if __name__ == '__main__':
    main()
