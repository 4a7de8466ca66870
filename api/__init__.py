"""Azure Functions app root for the questions API."""
