from schema_codegen.core.tags import TagExpansionWarning, expand, join_tags

CONTEXT = {
    "FieldName": "userId",
    "OriginalColumnName": "user_id",
    "LangType": "number",
    "IsNullable": True,
    "ColumnComment": None,
    "DefaultValue": None,
    "IsPrimaryKey": False,
    "StructName": "Posts",
    "TableName": "posts",
}


def test_placeholders_are_substituted():
    result = expand(
        ['json:"{{ OriginalColumnName }}"', '@Field("{{FieldName}}", {{ LangType }})'],
        CONTEXT,
    )
    assert result.tags == ['json:"user_id"', '@Field("userId", number)']
    assert result.warnings == []


def test_case_helpers():
    result = expand(
        ['json:"{{ to_camel_case OriginalColumnName }}"', "{{ to_screaming_snake_case FieldName }}"],
        CONTEXT,
    )
    assert result.tags == ['json:"userId"', "USER_ID"]


def test_legacy_placeholder_names():
    result = expand(
        ["{{ field_name }}", "{{ column_name }}", "{{ struct_name }}", "{{ actual_field_name }}"],
        CONTEXT,
    )
    assert result.tags == ["user_id", "user_id", "posts", "userId"]


def test_unknown_placeholder_is_left_verbatim_with_warning():
    result = expand(['db:"{{ OriginalColumName }}"', 'json:"{{ FieldName }}"'], CONTEXT)

    assert result.tags == ['db:"{{ OriginalColumName }}"', 'json:"userId"']
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert isinstance(warning, TagExpansionWarning)
    assert warning.placeholder == "{{ OriginalColumName }}"
    assert warning.column == "user_id"
    assert "OriginalColumName" in str(warning)


def test_unknown_helper_is_left_verbatim_with_warning():
    result = expand(["{{ to_title_case FieldName }}"], CONTEXT)
    assert result.tags == ["{{ to_title_case FieldName }}"]
    assert "to_title_case" in result.warnings[0].message


def test_failing_helper_is_left_verbatim_with_warning():
    context = dict(CONTEXT, ColumnComment="--")
    result = expand(['x:"{{ to_snake_case ColumnComment }}"', "{{ FieldName }}"], context)

    assert result.tags == ['x:"{{ to_snake_case ColumnComment }}"', "userId"]
    assert len(result.warnings) == 1
    assert "to_snake_case" in result.warnings[0].message
    assert result.warnings[0].placeholder == "{{ to_snake_case ColumnComment }}"


def test_substituted_values_are_not_rescanned():
    context = dict(CONTEXT, FieldName="{{ TableName }}")
    result = expand(["{{ FieldName }}"], context)
    assert result.tags == ["{{ TableName }}"]
    assert result.warnings == []


def test_values_are_formatted_and_blank_tags_dropped():
    result = expand(["{{ IsNullable }}", "{{ IsPrimaryKey }}", "{{ ColumnComment }}", "  "], CONTEXT)
    assert result.tags == ["true", "false"]


def test_tags_are_independent():
    result = expand(["{{ Bogus }}", "ok"], CONTEXT)
    assert result.tags == ["{{ Bogus }}", "ok"]
    assert len(result.warnings) == 1


def test_join_tags():
    assert join_tags(['json:"id"', 'db:"id"'], " ", "`{tags}`") == '`json:"id" db:"id"`'
    assert join_tags(["#[serde(skip)]", "#[x]"], "\n    ") == "#[serde(skip)]\n    #[x]"
    assert join_tags([], " ", "`{tags}`") == ""
