def make_room(id: int, name: str | None = None, price: float = 100.0, capacity: int = 2, features=()):
    return {
        "id": id,
        "name": name or f"Quarto {id}",
        "description": f"Descrição do quarto {id}",
        "price": price,
        "capacity": capacity,
        "imageUrl": f"/images/rooms/{id}.jpg",
        "features": list(features),
    }
