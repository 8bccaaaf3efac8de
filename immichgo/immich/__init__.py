"""Server API calls, supported media types and capture-date ranges."""