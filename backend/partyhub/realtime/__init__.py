"""Socket.IO side of the game: typed events, rooms, sessions and the router."""
