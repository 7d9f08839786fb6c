import sys
import psycopg2
from app.core.security import hash_password
from app.core.config import settings
from app.core.auth_utils import normalize_email
from app.core.enums import UserRole
from urllib.parse import urlparse


def create_admin_user(email: str, password: str, primer_nombre: str = "Admin", primer_apellido: str = "Trust") -> bool:
    email = normalize_email(email)
    try:
        db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))

        conn = psycopg2.connect(
            host=db_url.hostname or "localhost",
            port=db_url.port or 5432,
            user=db_url.username or "postgres",
            password=db_url.password or "postgres",
            database=db_url.path.lstrip("/") or "postgres"
        )
    except psycopg2.Error as e:
        print(f"Error connecting to database: {e}")
        return False

    try:
        with conn, conn.cursor() as cursor:
            cursor.execute("SELECT id FROM usuarios WHERE lower(email) = %s", (email,))
            if cursor.fetchone():
                print(f"Error: User '{email}' already exists")
                return False

            # Enum columns store the member name.
            cursor.execute(
                "INSERT INTO usuarios (primer_nombre, primer_apellido, email, password_hash, rol, activo, created_at, updated_at) "
                "VALUES (%s, %s, %s, %s, %s, TRUE, NOW(), NOW()) RETURNING id",
                (primer_nombre, primer_apellido, email, hash_password(password), UserRole.ADMINISTRADOR.name)
            )
            user_id = cursor.fetchone()[0]

        print(f"Admin user '{email}' created successfully")
        print(f"User ID: {user_id}")
        print(f"Role: {UserRole.ADMINISTRADOR}")
        return True

    except psycopg2.Error as e:
        print(f"Error creating admin user: {e}")
        return False
    finally:
        conn.close()


def main():
    if len(sys.argv) < 3:
        print("Usage: python create_admin.py <email> <password> [primer_nombre] [primer_apellido]")
        sys.exit(1)

    email = sys.argv[1]
    password = sys.argv[2]
    names = sys.argv[3:5]

    if not email or not password:
        print("Error: email and password cannot be empty")
        sys.exit(1)
    if len(password) < 8:
        print("Error: password must be at least 8 characters")
        sys.exit(1)

    success = create_admin_user(email, password, *names)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
