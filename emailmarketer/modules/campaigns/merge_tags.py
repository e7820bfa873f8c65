"""
Merge Tags
==========

Per-recipient placeholder substitution for subject, HTML and plain text.

Supported placeholders (names are case-insensitive):
    {{email}}        recipient email address
    {{name}}         recipient name, empty when unset
    {{tagN}}         N-th tag of the contact, 1-indexed
    {{tag:<value>}}  the contact's stored tag equal to <value>, ignoring case

Substitution is one regex pass: replacement text is never re-scanned, so a
tag whose value looks like a placeholder is emitted literally. Placeholders
that do not resolve are left untouched.
"""

import re

MERGE_TAG_PATTERN = re.compile(r'\{\{(email|name|tag(\d+)|tag:([^}]*))\}\}', re.IGNORECASE)


def _resolve(match, contact, tags):
    token = match.group(1).lower()

    if token == 'email':
        return contact.get('email') or ''
    if token == 'name':
        return contact.get('name') or ''

    index = match.group(2)
    if index is not None:
        position = int(index) - 1
        if 0 <= position < len(tags):
            return tags[position]
        return match.group(0)

    wanted = match.group(3).lower()
    for tag in tags:
        if tag.lower() == wanted:
            return tag
    return match.group(0)


def merge_tags(content, contact):
    """Replace merge tags in content with values from a contact dict"""
    if content is None:
        return ''
    tags = list(contact.get('tags') or [])
    return MERGE_TAG_PATTERN.sub(lambda match: _resolve(match, contact, tags), content)
