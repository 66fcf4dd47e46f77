"""CV Scanner: résumé identity extraction and skill keyword matching."""
