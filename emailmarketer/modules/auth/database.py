import sqlite3

from ...core.errors import ValidationError
from .utils import hash_password, verify_password

# Columns safe to return to API clients
PUBLIC_USER_FIELDS = ('id', 'email', 'name', 'role', 'active', 'created_at')


def public_user(user):
    """Strip secrets from a user row"""
    if not user:
        return None
    return {key: user.get(key) for key in PUBLIC_USER_FIELDS}


class UserDatabase:
    def __init__(self, db):
        self.db = db

    def get_user_by_email(self, email):
        """Get user by email address"""
        return self.db.fetch_one('SELECT * FROM users WHERE email = ?', (email,))

    def get_user_by_id(self, user_id):
        """Get user by ID"""
        return self.db.fetch_one('SELECT * FROM users WHERE id = ?', (user_id,))

    def create_user(self, email, password, name='', role='user'):
        """Create a new user; raises ValidationError if the email is taken"""
        password_hash = hash_password(password)
        try:
            with self.db.transaction() as conn:
                cursor = conn.execute("""
                    INSERT INTO users (email, password_hash, name, role)
                    VALUES (?, ?, ?, ?)
                """, (email, password_hash, name or '', role))
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError:
            raise ValidationError('User already exists with this email')
        return self.get_user_by_id(user_id)

    def verify_user_credentials(self, email, password):
        """Return the user row if the credentials match, else None"""
        user = self.get_user_by_email(email)
        if user and verify_password(password, user['password_hash']):
            return user
        return None

    def update_user(self, user_id, **updates):
        """Update name/password/role/active; unknown fields are ignored"""
        allowed_fields = ['name', 'role', 'active']
        set_clauses = []
        values = []

        for field, value in updates.items():
            if field == 'password' and value:
                set_clauses.append('password_hash = ?')
                values.append(hash_password(value))
            elif field in allowed_fields and value is not None:
                set_clauses.append(f'{field} = ?')
                values.append(value)

        if set_clauses:
            set_clauses.append('updated_at = CURRENT_TIMESTAMP')
            values.append(user_id)
            with self.db.transaction() as conn:
                conn.execute(f"UPDATE users SET {', '.join(set_clauses)} WHERE id = ?", values)

        return self.get_user_by_id(user_id)
