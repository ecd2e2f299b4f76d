"""
SQL statements for the PostgreSQL user store.

Text parameters use COALESCE(NULLIF(:x, ''), column) so that empty inputs
keep the stored value.
"""

USER_COLUMNS = """user_id, first_name, last_name, email, role, about, avatar, phone_number,
    address, city, country, gender, postcode, birthday, created_at, updated_at, login_date"""

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    user_id      UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    first_name   VARCHAR(32) NOT NULL DEFAULT '',
    last_name    VARCHAR(32) NOT NULL DEFAULT '',
    email        VARCHAR(64) NOT NULL UNIQUE CHECK (email <> ''),
    password     VARCHAR(250) NOT NULL,
    role         VARCHAR(10) NOT NULL DEFAULT 'user',
    about        VARCHAR(1024),
    avatar       VARCHAR(512),
    phone_number VARCHAR(20),
    address      VARCHAR(250),
    city         VARCHAR(24),
    country      VARCHAR(24),
    gender       VARCHAR(20),
    postcode     INTEGER,
    birthday     DATE,
    created_at   TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
    updated_at   TIMESTAMP WITH TIME ZONE DEFAULT now(),
    login_date   TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
)
"""

CREATE_USER = f"""
INSERT INTO users (first_name, last_name, email, password, role, about, avatar, phone_number,
                   address, city, country, gender, postcode, birthday,
                   created_at, updated_at, login_date)
VALUES (:first_name, :last_name, :email, :password, COALESCE(NULLIF(:role, ''), 'user'),
        :about, :avatar, :phone_number, :address, :city, :country, :gender, :postcode, :birthday,
        now(), now(), now())
RETURNING {USER_COLUMNS}, password
"""

UPDATE_USER = f"""
UPDATE users
SET first_name = COALESCE(NULLIF(:first_name, ''), first_name),
    last_name = COALESCE(NULLIF(:last_name, ''), last_name),
    email = COALESCE(NULLIF(:email, ''), email),
    about = COALESCE(NULLIF(:about, ''), about),
    avatar = COALESCE(NULLIF(:avatar, ''), avatar),
    phone_number = COALESCE(NULLIF(:phone_number, ''), phone_number),
    address = COALESCE(NULLIF(:address, ''), address),
    city = COALESCE(NULLIF(:city, ''), city),
    country = COALESCE(NULLIF(:country, ''), country),
    gender = COALESCE(NULLIF(:gender, ''), gender),
    postcode = COALESCE(NULLIF(:postcode, 0), postcode),
    birthday = COALESCE(:birthday, birthday),
    updated_at = now()
WHERE user_id = :user_id
RETURNING {USER_COLUMNS}, password
"""

UPDATE_USER_ROLE = f"""
UPDATE users
SET role = COALESCE(NULLIF(:role, ''), role),
    updated_at = now()
WHERE user_id = :user_id
RETURNING {USER_COLUMNS}, password
"""

DELETE_USER = "DELETE FROM users WHERE user_id = :user_id RETURNING user_id"

GET_USER = f"SELECT {USER_COLUMNS}, password FROM users WHERE user_id = :user_id"

FIND_USER_BY_EMAIL = f"SELECT {USER_COLUMNS}, password FROM users WHERE email = :email"

COUNT_USERS_BY_NAME = """
SELECT COUNT(user_id) FROM users
WHERE first_name ILIKE '%' || :name || '%' ESCAPE '\\'
   OR last_name ILIKE '%' || :name || '%' ESCAPE '\\'
"""

FIND_USERS_BY_NAME = f"""
SELECT {USER_COLUMNS}, password FROM users
WHERE first_name ILIKE '%' || :name || '%' ESCAPE '\\'
   OR last_name ILIKE '%' || :name || '%' ESCAPE '\\'
ORDER BY first_name, last_name
OFFSET :offset LIMIT :limit
"""

COUNT_USERS = "SELECT COUNT(user_id) FROM users"

# {order_by} is substituted from ORDERABLE_COLUMNS only, never from raw input
LIST_USERS = f"""
SELECT {USER_COLUMNS}, password FROM users
ORDER BY {{order_by}}
OFFSET :offset LIMIT :limit
"""

DEFAULT_ORDER = "first_name, last_name"
