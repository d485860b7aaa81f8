"""YouTube search links for the tracks of a public Spotify playlist."""
