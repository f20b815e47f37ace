"""
Weather provider integration.

Responsibilities:
- Hold OpenWeather configuration and credentials.
- Fetch the current conditions for a city with a bounded deadline.
- Normalise the provider payload into an immutable WeatherSnapshot.
"""
