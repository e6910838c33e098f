# emporium/services/lock_service.py
import redis

from emporium.utils.retry import redis_retry
from emporium.utils.settings import REDIS_URL
from emporium.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#wiec lock zwalnia tylko ten kto go zalozyl (token)


def cart_lock_key(user_id) -> str:
    return f"cart:user:{user_id}:lock"


class LockService:
    """
    -serializacja operacji na koszyku jednego usera (lock)
    -zwalnianie locka tylko przez wlasciciela tokena
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire_cart_lock(self, user_id, token: str, ttl: int) -> bool:
        key = cart_lock_key(user_id)
        logger.debug(f"Acquire lock {key}")
        #SET cart:user:<id>:lock "<token>" NX EX <ttl>
        acquired = self.redis.set(
            name=key,
            value=token,
            nx=True,
            ex=ttl,  # lock wygasa sam jesli proces padnie
        )
        if acquired:
            return True
        # retry po zgubionej odpowiedzi: lock moze juz byc nasz
        return self.redis.get(key) == token

    @redis_retry()
    def release_cart_lock(self, user_id, token: str) -> bool:
        key = cart_lock_key(user_id)
        logger.debug(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
