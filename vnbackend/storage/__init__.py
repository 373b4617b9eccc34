"""Database access for chapters, nodes, characters, players, media and requests."""