"""Area weather service: area-level forecasts and historical lookups over WeatherAPI.com."""
