"""Offer repository."""


from app.domain.offer import Offer
from app.repositories.base import BaseRepository


class OfferRepository(BaseRepository[Offer]):
    model = Offer
