ISS_LOCATION_TOPIC = "iss-location"
