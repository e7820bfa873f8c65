"""
Email Templates Models
======================
"""

import json
import logging

from ...core.errors import ValidationError
from ..sharing.access import ResourceKind
from ..sharing.models import delete_shares_for_resource

logger = logging.getLogger(__name__)

# API field name -> column; both camelCase and snake_case are accepted
FIELD_ALIASES = {
    'name': 'name',
    'subject': 'subject',
    'htmlContent': 'html_content',
    'html_content': 'html_content',
    'plainText': 'plain_text',
    'plain_text': 'plain_text',
    'editorBlocks': 'editor_blocks',
    'editor_blocks': 'editor_blocks',
}

TEMPLATE_COLUMNS = ('name', 'subject', 'html_content', 'plain_text', 'editor_blocks')


# Columns holding a row id rather than text
ID_COLUMNS = ('template_id', 'list_id')


def _check_type(column, value):
    if value is None or column == 'editor_blocks':
        return value
    if column in ID_COLUMNS:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        raise ValidationError(f"'{column}' must be an integer id")
    if not isinstance(value, str):
        raise ValidationError(f"'{column}' must be a string")
    return value


def normalize_fields(data, columns=TEMPLATE_COLUMNS, aliases=FIELD_ALIASES):
    """
    Map request keys onto column names; keys absent from data stay absent.
    Raises ValidationError for values of the wrong type.
    """
    fields = {}
    for key, value in (data or {}).items():
        column = aliases.get(key, key)
        if column in columns:
            fields[column] = _check_type(column, value)
    return fields


def dump_blocks(blocks):
    if blocks is None:
        return None
    if isinstance(blocks, str):
        return blocks
    return json.dumps(blocks)


def load_blocks(row):
    """Decode the stored editor_blocks JSON in place"""
    if row and row.get('editor_blocks'):
        try:
            row['editor_blocks'] = json.loads(row['editor_blocks'])
        except (TypeError, ValueError):
            pass
    return row


def get_template(db, template_id):
    return load_blocks(db.fetch_one('SELECT * FROM templates WHERE id = ?', (template_id,)))


def get_templates(db, owner_id):
    rows = db.fetch_all("""
        SELECT * FROM templates WHERE owner_id = ?
        ORDER BY created_at DESC, id DESC
    """, (owner_id,))
    return [load_blocks(row) for row in rows]


def create_template(db, owner_id, data):
    """Create a template; name, subject and HTML content are required"""
    fields = normalize_fields(data)
    if not fields.get('name') or not fields.get('subject') or not fields.get('html_content'):
        raise ValidationError('Name, subject, and HTML content are required')

    with db.transaction() as conn:
        cursor = conn.execute("""
            INSERT INTO templates (owner_id, name, subject, html_content, plain_text, editor_blocks)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            owner_id,
            fields['name'],
            fields['subject'],
            fields['html_content'],
            fields.get('plain_text') or '',
            dump_blocks(fields.get('editor_blocks'))
        ))
        template_id = cursor.lastrowid

    logger.info(f"Created template {template_id} for user {owner_id}")
    return get_template(db, template_id)


def update_template(db, template_id, data):
    """Partial update"""
    fields = normalize_fields(data)
    for required in ('name', 'subject', 'html_content'):
        if required in fields and not fields[required]:
            raise ValidationError(f"{required.replace('_', ' ').capitalize()} cannot be empty")
    if 'editor_blocks' in fields:
        fields['editor_blocks'] = dump_blocks(fields['editor_blocks'])

    if fields:
        set_clauses = [f'{column} = ?' for column in fields]
        set_clauses.append('updated_at = CURRENT_TIMESTAMP')
        with db.transaction() as conn:
            conn.execute(
                f"UPDATE templates SET {', '.join(set_clauses)} WHERE id = ?",
                list(fields.values()) + [template_id]
            )
    return get_template(db, template_id)


def delete_template(db, template_id):
    with db.transaction() as conn:
        delete_shares_for_resource(db, ResourceKind.TEMPLATE, template_id)
        conn.execute('DELETE FROM templates WHERE id = ?', (template_id,))
    logger.info(f"Deleted template {template_id}")
