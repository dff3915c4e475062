import sys

from loguru import logger

from acl.config import get_settings
from acl.models import AclStore

USAGE = "Usage: python main.py check <email> <permission> [<permission> ...]"


def main():
    if len(sys.argv) < 4 or sys.argv[1] != "check":
        logger.error(USAGE)
        sys.exit(1)

    email = sys.argv[2]
    permissions = sys.argv[3:]

    store = AclStore(get_settings().database_url)
    store.create_tables()
    try:
        user = store.load_user(email)
        if user is None:
            logger.error(f"User {email} does not exist")
            sys.exit(1)

        if user.access(permissions):
            logger.success(f"{email} has access to: {', '.join(permissions)}")
            sys.exit(0)

        denied = [p for p in permissions if not user.access(p)]
        logger.warning(f"{email} is missing: {', '.join(denied)}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Fatal error during access check: {e}")
        sys.exit(1)
    finally:
        store.dispose()


if __name__ == "__main__":
    main()
