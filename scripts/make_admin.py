# scripts/make_admin.py
# Назначает роль пользователю по email: python -m scripts.make_admin user@example.com [client|admin]
import sys

from sqlalchemy.orm import Session

from storefront.db.session import engine
from storefront.models.user import RoleEnum, User

def set_role(email: str, role: RoleEnum) -> bool:
    with Session(bind=engine) as session:
        user = session.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            return False
        user.role = role
        session.commit()
        return True

def main(argv) -> int:
    if len(argv) not in (2, 3):
        print('Usage: make_admin.py EMAIL [client|admin]')
        return 2
    role = RoleEnum(argv[2]) if len(argv) == 3 else RoleEnum.admin
    if not set_role(argv[1], role):
        print('User not found:', argv[1])
        return 1
    print(f'{argv[1]} -> {role.value}')
    return 0

if __name__ == '__main__':
    sys.exit(main(sys.argv))
